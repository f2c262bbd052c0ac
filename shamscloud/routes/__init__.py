from . import admin, auth, files, public

routers = [auth.router, files.router, public.router, admin.router]
