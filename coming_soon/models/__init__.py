# Importar todos los modelos para que create_all() los registre
from .coming_soon_subscriber import ComingSoonSubscriber

__all__ = [
    "ComingSoonSubscriber",
]
