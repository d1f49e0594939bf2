# Path: anki_query/utils/__init__.py
