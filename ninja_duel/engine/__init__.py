# ninja_duel/engine/__init__.py
