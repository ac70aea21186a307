from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

PACKAGE_DIR = Path(__file__).resolve().parent
TPL_DIR = PACKAGE_DIR / "templates"


class ConfigError(Exception):
    pass


@dataclass
class SiteConfig:
    root: Path
    author: str = "PJ"
    css_path: str = "/index.css"
    blog_title: str = "PJ’s Blog"
    blog_description: str = "Posts by PJ"
    devlog_title: str = "Devlog"
    devlog_description: str = "Project logs and notes"
    homepage_max_items: int = 8
    templates: Path = TPL_DIR

    @property
    def content_dir(self) -> Path:
        return self.root / "content"

    @property
    def public_dir(self) -> Path:
        return self.root / "public"

    @property
    def homepage(self) -> Path:
        return self.public_dir / "index.html"


def load_config(root, overrides: Optional[dict] = None) -> SiteConfig:
    """Site settings from <root>/site.yml, if there is one, over the defaults."""
    root = Path(root).resolve()
    data = {}
    site_yml = root / "site.yml"
    if site_yml.exists():
        with open(site_yml, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    data.update(overrides or {})
    known = {f.name for f in fields(SiteConfig)} - {"root", "templates"}
    settings = {k: v for k, v in data.items() if k in known and v is not None}
    if "homepage_max_items" in settings:
        settings["homepage_max_items"] = int(settings["homepage_max_items"])
    if data.get("templates"):
        settings["templates"] = root / data["templates"]
    return SiteConfig(root=root, **settings)


@dataclass
class MailConfig:
    user: str
    password: str
    host: str = "smtp.gmail.com"
    port: int = 465
    recipient: Optional[str] = None

    @classmethod
    def from_env(cls, environ=None) -> "MailConfig":
        env = os.environ if environ is None else environ
        missing = [key for key in ("EMAIL_USER", "EMAIL_PASS") if not env.get(key)]
        if missing:
            raise ConfigError(f"Missing required env vars: {', '.join(missing)}")
        return cls(
            user=env["EMAIL_USER"],
            password=env["EMAIL_PASS"],
            host=env.get("SMTP_HOST", "smtp.gmail.com"),
            port=int(env.get("SMTP_PORT", 465)),
            recipient=env.get("CONTACT_TO") or env["EMAIL_USER"],
        )
