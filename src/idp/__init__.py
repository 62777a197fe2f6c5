"""idp — ядро жизненного цикла учётных записей identity-провайдера."""

__version__ = "0.1.0"
