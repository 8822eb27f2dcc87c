"""Persistencia de la cookie de sesión del Hub.

El navegador conserva la cookie entre peticiones; la CLI se ejecuta una vez por
comando, así que guardamos el jar en disco (formato LWP) tras el login y lo
borramos tras el logout.
"""

from __future__ import annotations

import logging
from http.cookiejar import LoadError, LWPCookieJar
from pathlib import Path

logger = logging.getLogger(__name__)


def load_cookie_jar(path: Path) -> LWPCookieJar:
    jar = LWPCookieJar(str(path))
    if path.exists():
        try:
            jar.load(ignore_discard=True, ignore_expires=False)
        except (LoadError, OSError) as exc:
            logger.warning("Ignoring unreadable cookie jar %s: %s", path, exc)
    return jar


def save_cookie_jar(jar: LWPCookieJar) -> None:
    if not jar.filename:
        return
    path = Path(jar.filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    jar.save(ignore_discard=True, ignore_expires=False)
    try:
        path.chmod(0o600)
    except OSError:
        logger.debug("Could not restrict permissions on %s", path)


def clear_cookie_jar(jar: LWPCookieJar) -> None:
    jar.clear()
    if jar.filename:
        Path(jar.filename).unlink(missing_ok=True)
