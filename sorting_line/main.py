#!/usr/bin/env python3
"""
Waste Sorting Line - simulator entry point

Runs the line with either the console UI (default) or the web dashboard,
selected by settings.json -> ui.mode ("console" or "web").
"""

from sorting_line.controllers import AppController
from sorting_line.remote_sink import RemoteSink
from sorting_line.settings import load_settings, resolve_path
from sorting_line.storage import DEFAULT_KEY, LocalStore, OfflineStorage
from sorting_line.ui import ConsoleUI
from sorting_line.webapp.app import WebUI, bind_ui


def build_controller(settings, ui):
    storage_cfg = settings.get('storage', {})
    store = LocalStore(resolve_path(storage_cfg.get('path', 'offline_data.json')))
    storage = OfflineStorage(store, storage_cfg.get('key', DEFAULT_KEY))
    remote = RemoteSink(settings.get('mqtt', {}), settings.get('device', {}))
    return AppController(settings, ui, remote, storage)


def main():
    """Main entry point"""
    settings = load_settings()
    device = settings.get('device', {})

    print("\n" + "=" * 50)
    print(f"  {device.get('name', 'WASTE SORTING LINE').upper()} - {device.get('id', '?')}")
    print("=" * 50 + "\n")

    mode = settings.get('ui', {}).get('mode', 'console')
    ui = WebUI() if mode == 'web' else ConsoleUI()

    controller = build_controller(settings, ui)
    controller.initialize()
    print("\n[SYSTEM] Ready.\n")

    try:
        if mode == 'web':
            web_cfg = settings.get('web', {})
            bind_ui(ui).run(
                host=web_cfg.get('host', '0.0.0.0'),
                port=int(web_cfg.get('port', 5000)),
                debug=False,
                use_reloader=False,
            )
        else:
            ui.run()
    finally:
        controller.cleanup()
        print("[SYSTEM] Done.")


if __name__ == "__main__":
    main()
