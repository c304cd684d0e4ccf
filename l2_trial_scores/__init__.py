"""Escrowed SNX snapshot for accounts that withdrew through SynthetixBridgeToBase."""

__version__ = "0.1.0"
