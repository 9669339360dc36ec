# ninja_duel/content/__init__.py
