"""SFTP Manager: управление SFTP-серверами на базе контейнеров atmoz/sftp."""

__version__ = "1.0.0"
