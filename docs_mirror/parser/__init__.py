# docs_mirror/parser/__init__.py
