"""
snaptrack — snapshot-based portfolio valuation core.

Пакет восстанавливает composite-состояние портфеля из разреженных
per-platform снапшотов (carry-forward) и считает по нему метрики
доходности и ребалансировки.
"""

__version__ = "0.3.0"
