"""Receiver and admission pipeline for Crisp webhook notifications."""

__version__ = "1.0.0"
