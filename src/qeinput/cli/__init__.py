# src/qeinput/cli/__init__.py
