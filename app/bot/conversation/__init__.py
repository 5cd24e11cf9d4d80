# app/bot/conversation/__init__.py
"""Движок админ-диалогов: события, записи мастеров, хранилище и сам движок."""
