"""Point d'entrée de l'application CycleChat."""

from __future__ import annotations

import logging
import tkinter as tk

from cyclechat.config import load_config
from cyclechat.navigation import Navigator
from cyclechat.services import ApiClient, AuthGateway, MessageGateway, SessionManager
from cyclechat.storage import FileTokenStore
from cyclechat.ui.app import MainWindow
from cyclechat.ui.scheduler import TkDispatcher


def main() -> None:
    """Initialise les dépendances puis lance l'interface Tkinter."""
    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(threadName)s: %(message)s",
    )

    root = tk.Tk()
    dispatcher = TkDispatcher(root)
    store = FileTokenStore(config.token_path)
    navigator = Navigator()
    client = ApiClient.from_config(config, store, navigator, dispatcher=dispatcher)
    session = SessionManager(
        AuthGateway(client),
        store,
        navigator,
        dispatcher=dispatcher,
        unauthorized=client.unauthorized,
    )
    app = MainWindow(
        session=session,
        gateway=MessageGateway(client),
        navigator=navigator,
        root=root,
        dispatcher=dispatcher,
        health_interval_ms=config.health_interval_ms,
    )
    try:
        app.run()
    finally:
        client.close()


if __name__ == "__main__":
    main()
