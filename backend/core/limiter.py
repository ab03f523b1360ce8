from slowapi import Limiter
from slowapi.util import get_remote_address

# Rate limiter partagé entre main.py et les routers
limiter = Limiter(key_func=get_remote_address)
