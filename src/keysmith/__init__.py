"""
Keysmith — генератор и менеджер паролей.

Пакет содержит:
    • services   — Session Manager, Password Workspace, генератор паролей
    • backend    — сервис идентификации и хранилище сохранённых паролей
    • api        — HTTP-поверхность (FastAPI) над контроллером приложения
"""

__version__ = "0.3.0"
