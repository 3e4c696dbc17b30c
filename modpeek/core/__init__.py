# modpeek/core/__init__.py
