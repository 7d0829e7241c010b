# app/__init__.py
"""
FoodieGram API.

Paquetes:
- `app.users`: registro, login, token y avatar.
- `app.feed`: posts y likes.
- `app.comments`: comentarios (siempre dentro de un post).
- `app.core` / `app.db`: config, errores, seguridad y sesión de DB.
"""
