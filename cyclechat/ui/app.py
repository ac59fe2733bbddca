"""Interface Tkinter principale."""

from __future__ import annotations

import logging
import tkinter as tk
from concurrent.futures import Future
from tkinter import messagebox, ttk

import sv_ttk
from PIL import Image, ImageDraw, ImageTk

from cyclechat.models import Message
from cyclechat.navigation import Navigator, View
from cyclechat.services import (
    AuthError,
    MessageBoard,
    MessageGateway,
    ServerStatusPoller,
    ServiceError,
    SessionManager,
    ValidationError,
)
from cyclechat.state import ServerStatus, Session
from cyclechat.ui.router import ViewRouter
from cyclechat.ui.scheduler import TkDispatcher, TkScheduler

logger = logging.getLogger(__name__)

ACCENT_COLOR = "#3B82F6"
BACKGROUND_COLOR = "#121212"
CARD_COLOR = "#181818"
STATUS_NEUTRAL_COLOR = "#B3B3B3"
STATUS_ERROR_COLOR = "#F87171"
STATUS_SUCCESS_COLOR = "#34D399"
LISTBOX_SELECTION_FG = "#000000"
AVATAR_SIZE = 40
BADGE_SIZE = 12

STATUS_LABELS = {
    ServerStatus.CHECKING: ("Vérification du serveur…", STATUS_NEUTRAL_COLOR),
    ServerStatus.ONLINE: ("Serveur en ligne", STATUS_SUCCESS_COLOR),
    ServerStatus.OFFLINE: ("Serveur hors ligne", STATUS_ERROR_COLOR),
}


def _circle(size: int, color: str) -> Image.Image:
    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    drawer = ImageDraw.Draw(image)
    drawer.ellipse((0, 0, size - 1, size - 1), fill=color)
    return image


def _avatar_image(username: str) -> Image.Image:
    """Pastille ronde portant l'initiale de l'utilisateur."""
    image = _circle(AVATAR_SIZE, ACCENT_COLOR)
    drawer = ImageDraw.Draw(image)
    initial = (username[:1] or "?").upper()
    left, top, right, bottom = drawer.textbbox((0, 0), initial)
    drawer.text(
        ((AVATAR_SIZE - (right - left)) / 2 - left, (AVATAR_SIZE - (bottom - top)) / 2 - top),
        initial,
        fill="#FFFFFF",
    )
    return image


class MainWindow:
    """Fenêtre principale de l'application."""

    def __init__(
        self,
        session: SessionManager,
        gateway: MessageGateway,
        navigator: Navigator,
        *,
        root: tk.Tk,
        dispatcher: TkDispatcher,
        health_interval_ms: int = 5000,
    ) -> None:
        self._session = session
        self._navigator = navigator
        self._dispatcher = dispatcher
        self._board = MessageBoard(gateway, dispatcher)

        self.root = root
        self.root.title("CycleChat – Messagerie")
        self.root.geometry("720x560")
        self.root.minsize(560, 420)

        sv_ttk.set_theme("dark")
        self.root.configure(bg=BACKGROUND_COLOR)
        self._configure_styles()

        self._poller = ServerStatusPoller(
            gateway,
            TkScheduler(self.root),
            dispatcher=dispatcher,
            interval_ms=health_interval_ms,
            on_online=self._reload_messages,
        )
        self._router = ViewRouter(session, navigator, self._poller, self._board)

        self._username_var = tk.StringVar()
        self._password_var = tk.StringVar()
        self._message_var = tk.StringVar()
        self._avatar_photo: ImageTk.PhotoImage | None = None
        self._badges: dict[ServerStatus, ImageTk.PhotoImage] = {
            status: ImageTk.PhotoImage(_circle(BADGE_SIZE, color))
            for status, (_, color) in STATUS_LABELS.items()
        }

        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(1, weight=1)

        self._build_header()
        self._build_login_view()
        self._build_messages_view()

        self._unsubscribers = [
            self._session.subscribe(self._on_session_changed),
            self._navigator.subscribe(self._on_view_changed),
            self._poller.subscribe(self._on_status_changed),
            self._board.subscribe(self._render_messages),
        ]
        self.root.protocol("WM_DELETE_WINDOW", self.close)

        self._on_session_changed(self._session.session)
        self._on_view_changed(self._navigator.current)

    # --------------------------------------------------------------------- UI -
    def _configure_styles(self) -> None:
        style = ttk.Style()
        style.configure("Main.TFrame", background=BACKGROUND_COLOR)
        style.configure("Header.TFrame", background=BACKGROUND_COLOR)
        style.configure("Card.TFrame", background=CARD_COLOR)
        style.configure(
            "HeaderTitle.TLabel",
            background=BACKGROUND_COLOR,
            foreground="#FFFFFF",
            font=("Helvetica", 18, "bold"),
        )
        style.configure(
            "Status.TLabel",
            background=BACKGROUND_COLOR,
            foreground=STATUS_NEUTRAL_COLOR,
            font=("Helvetica", 11),
        )
        style.configure(
            "Section.TLabel",
            background=CARD_COLOR,
            foreground="#FFFFFF",
            font=("Helvetica", 12, "bold"),
        )
        style.configure(
            "ServerStatus.TLabel",
            background=CARD_COLOR,
            foreground=STATUS_NEUTRAL_COLOR,
            font=("Helvetica", 11),
        )
        style.configure("Accent.TButton", font=("Helvetica", 11, "bold"))
        style.configure("TButton", padding=(16, 8))
        style.map("TButton", background=[("disabled", "#2B2B2B")])
        self.root.option_add("*Font", "Helvetica 11")

    def _build_header(self) -> None:
        frame = ttk.Frame(self.root, style="Header.TFrame", padding=(24, 12))
        frame.grid(row=0, column=0, sticky="nwe")
        frame.columnconfigure(1, weight=1)

        ttk.Label(frame, text="CycleChat", style="HeaderTitle.TLabel").grid(
            row=0, column=0, sticky="w"
        )

        self._status_label = ttk.Label(frame, text="Non connecté", style="Status.TLabel")
        self._status_label.grid(row=0, column=1, sticky="e", padx=12)

        self._avatar_label = ttk.Label(frame, style="Status.TLabel")
        self._avatar_label.grid(row=0, column=2, sticky="e")

        self._logout_button = ttk.Button(
            frame,
            text="Déconnexion",
            command=self.logout,
            state=tk.DISABLED,
        )
        self._logout_button.grid(row=0, column=3, sticky="e", padx=(12, 0))

    def _build_login_view(self) -> None:
        self._login_frame = ttk.Frame(self.root, style="Main.TFrame", padding=(24, 24))
        self._login_frame.columnconfigure(0, weight=1)

        card = ttk.Frame(self._login_frame, style="Card.TFrame", padding=(28, 24))
        card.grid(row=0, column=0)
        card.columnconfigure(1, weight=1)

        ttk.Label(card, text="Connexion", style="Section.TLabel").grid(
            row=0, column=0, columnspan=2, sticky="w", pady=(0, 16)
        )
        ttk.Label(card, text="Nom d'utilisateur", style="ServerStatus.TLabel").grid(
            row=1, column=0, sticky="w", pady=4
        )
        self._username_entry = ttk.Entry(card, textvariable=self._username_var, width=28)
        self._username_entry.grid(row=1, column=1, sticky="ew", padx=(12, 0), pady=4)

        ttk.Label(card, text="Mot de passe", style="ServerStatus.TLabel").grid(
            row=2, column=0, sticky="w", pady=4
        )
        password_entry = ttk.Entry(card, textvariable=self._password_var, show="•", width=28)
        password_entry.grid(row=2, column=1, sticky="ew", padx=(12, 0), pady=4)
        password_entry.bind("<Return>", lambda _: self.login())

        self._login_button = ttk.Button(
            card,
            text="Se connecter",
            command=self.login,
            style="Accent.TButton",
        )
        self._login_button.grid(row=3, column=0, columnspan=2, sticky="ew", pady=(16, 0))

    def _build_messages_view(self) -> None:
        self._messages_frame = ttk.Frame(self.root, style="Main.TFrame", padding=(24, 8, 24, 24))
        self._messages_frame.columnconfigure(0, weight=1)
        self._messages_frame.rowconfigure(0, weight=1)

        card = ttk.Frame(self._messages_frame, style="Card.TFrame", padding=(20, 18))
        card.grid(row=0, column=0, sticky="nsew")
        card.columnconfigure(0, weight=1)
        card.rowconfigure(1, weight=1)

        top = ttk.Frame(card, style="Card.TFrame")
        top.grid(row=0, column=0, sticky="ew")
        top.columnconfigure(0, weight=1)
        ttk.Label(top, text="Messages", style="Section.TLabel").grid(row=0, column=0, sticky="w")
        self._server_status_label = ttk.Label(
            top,
            compound=tk.LEFT,
            style="ServerStatus.TLabel",
        )
        self._server_status_label.grid(row=0, column=1, sticky="e")

        list_container = ttk.Frame(card, style="Card.TFrame")
        list_container.grid(row=1, column=0, sticky="nsew", pady=(16, 0))
        list_container.columnconfigure(0, weight=1)
        list_container.rowconfigure(0, weight=1)

        self._messages_listbox = tk.Listbox(
            list_container,
            activestyle=tk.NONE,
            bg=CARD_COLOR,
            fg="#FFFFFF",
            font=("Helvetica", 11),
            highlightthickness=0,
            selectbackground=ACCENT_COLOR,
            selectforeground=LISTBOX_SELECTION_FG,
            relief=tk.FLAT,
            borderwidth=0,
        )
        self._messages_listbox.grid(row=0, column=0, sticky="nsew")

        scrollbar = ttk.Scrollbar(
            list_container,
            orient=tk.VERTICAL,
            command=self._messages_listbox.yview,
        )
        scrollbar.grid(row=0, column=1, sticky="ns")
        self._messages_listbox.configure(yscrollcommand=scrollbar.set)

        compose = ttk.Frame(self._messages_frame, style="Main.TFrame")
        compose.grid(row=1, column=0, sticky="ew", pady=(16, 0))
        compose.columnconfigure(0, weight=1)

        self._message_entry = ttk.Entry(compose, textvariable=self._message_var)
        self._message_entry.grid(row=0, column=0, sticky="ew", ipady=4)
        self._message_entry.bind("<Return>", lambda _: self.send_message())

        self._send_button = ttk.Button(
            compose,
            text="Envoyer",
            command=self.send_message,
            style="Accent.TButton",
            state=tk.DISABLED,
        )
        self._send_button.grid(row=0, column=1, sticky="e", padx=(12, 0))

    def _show_view(self, view: View) -> None:
        if view is View.MESSAGES:
            self._login_frame.grid_remove()
            self._messages_frame.grid(row=1, column=0, sticky="nsew")
            self._message_entry.focus()
        else:
            self._messages_frame.grid_remove()
            self._login_frame.grid(row=1, column=0, sticky="nsew")
            self._username_entry.focus()

    def _update_avatar(self, session: Session) -> None:
        if session.user is None:
            self._avatar_label.configure(image="")
            self._avatar_photo = None
            return
        self._avatar_photo = ImageTk.PhotoImage(_avatar_image(session.user.username))
        self._avatar_label.configure(image=self._avatar_photo)

    # -------------------------------------------------------------- Observers -
    def _on_session_changed(self, session: Session) -> None:
        """Met à jour l'en-tête selon l'état d'authentification."""
        if session.loading:
            self._status_label.configure(text="Chargement…", foreground=STATUS_NEUTRAL_COLOR)
            self._login_button.configure(state=tk.DISABLED)
            self._logout_button.configure(state=tk.DISABLED)
        elif session.is_authenticated:
            self._status_label.configure(
                text=f"Connecté en tant que : {session.user.username}",
                foreground=STATUS_SUCCESS_COLOR,
            )
            self._login_button.configure(state=tk.NORMAL)
            self._logout_button.configure(state=tk.NORMAL)
        else:
            self._status_label.configure(text="Non connecté", foreground=STATUS_NEUTRAL_COLOR)
            self._login_button.configure(state=tk.NORMAL)
            self._logout_button.configure(state=tk.DISABLED)
        self._update_avatar(session)

    def _on_view_changed(self, _view: View) -> None:
        # La garde peut avoir déjà redirigé pendant cette notification.
        view = self._navigator.current
        if view is not View.MESSAGES:
            self._message_var.set("")
        self._show_view(view)

    def _on_status_changed(self, status: ServerStatus) -> None:
        text, color = STATUS_LABELS[status]
        self._server_status_label.configure(
            text=f" {text}",
            image=self._badges[status],
            foreground=color,
        )
        self._send_button.configure(
            state=tk.NORMAL if status is ServerStatus.ONLINE else tk.DISABLED
        )

    def _render_messages(self, messages: list[Message]) -> None:
        self._messages_listbox.delete(0, tk.END)
        for message in messages:
            self._messages_listbox.insert(tk.END, message.display_text())
        if messages:
            self._messages_listbox.see(tk.END)

    # --------------------------------------------------------------- Callbacks -
    def login(self) -> None:
        username = self._username_var.get().strip()
        password = self._password_var.get()
        if not username or not password:
            messagebox.showwarning(
                "Champs manquants",
                "Veuillez saisir un nom d'utilisateur et un mot de passe.",
            )
            return

        self._login_button.configure(state=tk.DISABLED)
        self._session.login(username, password).add_done_callback(self._on_login_done)

    def _on_login_done(self, done: Future[Session]) -> None:
        if not self._session.loading:
            self._login_button.configure(state=tk.NORMAL)
        error = done.exception()
        if error is None:
            self._password_var.set("")
        elif isinstance(error, AuthError):
            messagebox.showerror("Connexion refusée", str(error))
        elif isinstance(error, ServiceError):
            messagebox.showerror(
                "Erreur de connexion",
                f"Impossible de se connecter : {error}",
            )
        else:
            logger.error("Échec inattendu de la connexion", exc_info=error)
            messagebox.showerror("Erreur de connexion", "Erreur inattendue, voir le journal.")

    def logout(self) -> None:
        """Déconnecte l'utilisateur courant."""
        if not self._session.is_authenticated:
            return
        self._logout_button.configure(state=tk.DISABLED)
        self._session.logout()

    def send_message(self) -> None:
        self._board.send(self._message_var.get()).add_done_callback(self._on_message_sent)

    def _on_message_sent(self, done: Future[Message]) -> None:
        error = done.exception()
        if error is None:
            self._message_var.set("")
        elif isinstance(error, ValidationError):
            messagebox.showwarning("Message non envoyé", str(error))
        elif isinstance(error, ServiceError):
            messagebox.showerror(
                "Envoi impossible",
                f"Le message n'a pas pu être envoyé : {error}",
            )
        else:
            logger.error("Échec inattendu de l'envoi", exc_info=error)

    def _reload_messages(self) -> None:
        self._board.reload().add_done_callback(self._on_messages_reloaded)

    def _on_messages_reloaded(self, done: Future[list[Message]]) -> None:
        error = done.exception()
        if isinstance(error, ServiceError):
            logger.warning("Rechargement des messages impossible : %s", error)
        elif error is not None:
            logger.error("Échec inattendu du rechargement", exc_info=error)

    def _initialize_session(self) -> None:
        self._session.initialize()

    # ----------------------------------------------------------------- Public -
    def close(self) -> None:
        self._router.close()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._dispatcher.shutdown()
        self.root.destroy()

    def run(self) -> None:
        self.root.after_idle(self._initialize_session)
        self.root.mainloop()
