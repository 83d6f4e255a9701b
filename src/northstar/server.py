"""
Static asset server for the browser viewer.

Serves a directory over HTTP, or HTTPS when ``key.pem`` and ``cert.pem``
are found in the SSL directory (iOS only exposes device orientation to
secure pages). Unknown paths fall back to ``index.html``.
"""

import functools
import logging
import os
import ssl
from dataclasses import dataclass
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional, Tuple


logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@dataclass
class ServerPlan:
    """Resolved listening parameters."""
    root: Path
    host: str
    port: int
    certfile: Optional[Path] = None
    keyfile: Optional[Path] = None

    @property
    def https(self) -> bool:
        return self.certfile is not None

    @property
    def url(self) -> str:
        scheme = "https" if self.https else "http"
        host = "localhost" if self.host in ("", "0.0.0.0") else self.host
        return f"{scheme}://{host}:{self.port}"


def find_certificates(ssl_dir: Path) -> Optional[Tuple[Path, Path]]:
    """Return (cert, key) if both exist in ``ssl_dir``."""
    cert = ssl_dir / "cert.pem"
    key = ssl_dir / "key.pem"
    if cert.is_file() and key.is_file():
        return cert, key
    return None


def plan_server(root: Optional[Path], host: str, port: int, https_port: int,
                ssl_dir: Path) -> ServerPlan:
    """
    Decide what to serve and how.

    Args:
        root: Asset directory, None for the packaged assets
        host: Bind address
        port: HTTP port
        https_port: HTTPS port, used when certificates are present
        ssl_dir: Directory searched for key.pem / cert.pem

    Returns:
        ServerPlan
    """
    root = Path(root) if root is not None else STATIC_DIR
    if not (root / "index.html").is_file():
        raise FileNotFoundError(f"No index.html in {root}")

    certs = find_certificates(Path(ssl_dir))
    if certs is not None:
        cert, key = certs
        return ServerPlan(root=root, host=host, port=https_port,
                          certfile=cert, keyfile=key)
    return ServerPlan(root=root, host=host, port=port)


class AssetRequestHandler(SimpleHTTPRequestHandler):
    """Static file handler with index.html fallback for client-side routes."""

    def _fallback_to_index(self) -> None:
        path = self.translate_path(self.path)
        if not os.path.exists(path):
            self.path = "/index.html"

    def do_GET(self):
        self._fallback_to_index()
        super().do_GET()

    def do_HEAD(self):
        self._fallback_to_index()
        super().do_HEAD()

    def log_message(self, format, *args):
        logger.debug(f"{self.address_string()} - {format % args}")


def create_server(plan: ServerPlan) -> ThreadingHTTPServer:
    """Bind a server for ``plan`` without starting it."""
    handler = functools.partial(AssetRequestHandler, directory=str(plan.root))
    httpd = ThreadingHTTPServer((plan.host, plan.port), handler)

    if plan.https:
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.load_cert_chain(certfile=str(plan.certfile), keyfile=str(plan.keyfile))
        httpd.socket = context.wrap_socket(httpd.socket, server_side=True)

    return httpd


def serve(plan: ServerPlan) -> None:
    """Run the server until interrupted."""
    httpd = create_server(plan)

    if plan.https:
        logger.info(f"HTTPS server running on {plan.url}")
        logger.info("Access from an iOS device using this computer's IP address")
    else:
        logger.info(f"HTTP server running on {plan.url}")
        logger.warning("Device orientation requires HTTPS on iOS devices. "
                       "Place key.pem and cert.pem in the SSL directory, "
                       "or use an HTTPS tunnel.")

    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Stopping server")
    finally:
        httpd.server_close()
