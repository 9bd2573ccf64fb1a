"""
Módulo de acceso a datos externos.

- MongoConnection: Gestión exclusiva de la conexión a MongoDB
- Repositorios (app.db.mongo): Lecturas de productos, negocios y órdenes
- ShippoClient: Cliente HTTP del carrier
"""

from app.db.connection import MongoConnection
from app.db.shippo_client import ShippoClient

__all__ = ["MongoConnection", "ShippoClient"]
