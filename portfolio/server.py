"""
HTTP server for the contact form endpoint (POST /api/contact).
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlparse

from .config import ConfigError, MailConfig
from .contact import RateLimiter, SmtpRelay, handle_contact

log = logging.getLogger(__name__)

MAX_BODY = 64 * 1024
MAX_DRAIN = 1024 * 1024
DEFAULT_PORT = 5050


class ContactServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address, relay, limiter=None):
        super().__init__(address, ContactHandler)
        self.relay = relay
        self.limiter = limiter or RateLimiter()


class ContactHandler(BaseHTTPRequestHandler):
    """Accepts JSON contact submissions and relays them by mail"""

    def do_POST(self):
        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            length = -1
        if length < 0:
            self.close_connection = True
            self.send_json(400, {"error": "Invalid Content-Length."})
            return
        if length > MAX_BODY:
            self.discard_body(length)
            self.send_json(413, {"error": "Payload too large."})
            return
        raw = self.rfile.read(length)

        path = urlparse(self.path).path
        if path != "/api/contact":
            self.send_json(404, {"error": "Not found"})
            return

        if not self.server.limiter.allow(self.client_address[0]):
            self.send_json(429, {"error": "Too many requests, please try again later."})
            return

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            self.send_json(400, {"error": "Body must be JSON."})
            return

        status, body = handle_contact(payload, self.server.relay)
        self.send_json(status, body)

    def do_GET(self):
        self.send_json(404, {"error": "Not found"})

    def discard_body(self, length):
        # at most MAX_DRAIN bytes are consumed
        remaining = min(length, MAX_DRAIN)
        while remaining > 0:
            chunk = self.rfile.read(min(remaining, 16 * 1024))
            if not chunk:
                break
            remaining -= len(chunk)

    def send_json(self, status, body):
        data = json.dumps(body).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format, *args):
        log.info("%s - %s", self.address_string(), format % args)


def make_server(relay, host="127.0.0.1", port=DEFAULT_PORT, limiter=None) -> ContactServer:
    return ContactServer((host, port), relay, limiter)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Serve the contact form endpoint.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", DEFAULT_PORT)))
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        mail_config = MailConfig.from_env()
    except ConfigError as e:
        log.error("%s", e)
        return 1

    httpd = make_server(SmtpRelay(mail_config), args.host, args.port)
    log.info("Server running on port %d", httpd.server_address[1])
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        log.info("Shutting down server.")
    finally:
        httpd.server_close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
