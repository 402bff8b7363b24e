# module bizconnect.app
from bizconnect.app_setup.factory import create_app

# App globale
app = create_app()
