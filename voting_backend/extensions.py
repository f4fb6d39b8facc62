# voting_backend/extensions.py

# Flask extensions, created unbound and attached in create_app()

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_socketio import SocketIO

db = SQLAlchemy()  # Database ORM
migrate = Migrate()  # DB migrations
limiter = Limiter(key_func=get_remote_address)  # HTTP rate limits, defaults come from RATELIMIT_DEFAULT
socketio = SocketIO()  # Realtime channel to booths and admin panels
