# shared/__init__.py
