import os
import socket

from student_browser.config import load_config
from student_browser.logging_config import configure_logging
from student_browser.ui.dash_app import create_dash_app

configure_logging()

config = load_config(os.getenv("STUDENT_BROWSER_CONFIG"))
app = create_dash_app(config)
server = app.server


def find_free_port(start_port: int) -> int:
    """Finds an available port starting from start_port."""
    port = start_port
    while port < start_port + 100:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            if s.connect_ex(("localhost", port)) != 0:
                return port
        port += 1
    return start_port


if __name__ == "__main__":
    final_port = find_free_port(config.port)

    if final_port != config.port:
        print(f"Warning: Port {config.port} was taken. Starting on {final_port}")

    app.run(host="0.0.0.0", port=final_port, debug=config.debug)
