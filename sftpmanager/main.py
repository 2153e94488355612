"""Точка входа в приложение SFTP Manager."""

from __future__ import annotations

import sys

from sftpmanager.cli import app


def main() -> int:
    """Запускает CLI и возвращает код завершения."""

    try:
        app(prog_name="sftp-manager")
    except SystemExit as exc:
        if exc.code is None:
            return 0
        return exc.code if isinstance(exc.code, int) else 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
