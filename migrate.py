#!/usr/bin/env python3
"""
Script para gestionar migraciones de base de datos con Alembic.

La URL se toma de la configuración de la aplicación (POSTGRES_* o DATABASE_URL).
"""
import sys
from pathlib import Path

# Agregar el directorio raíz al path
root_dir = Path(__file__).parent
sys.path.insert(0, str(root_dir))

from alembic.config import Config
from alembic import command
from app.core.config import settings

USAGE = """Uso:
  python migrate.py create 'message'   # Crear migración (autogenerate)
  python migrate.py upgrade [rev]      # Ejecutar migraciones (por defecto head)
  python migrate.py downgrade [rev]    # Rollback (por defecto -1)
  python migrate.py stamp [rev]        # Marcar la base como migrada sin ejecutar
  python migrate.py history            # Ver historial
  python migrate.py current            # Ver actual"""


def get_alembic_config() -> Config:
    """Obtener configuración de Alembic con la URL de la aplicación."""
    alembic_cfg = Config(str(root_dir / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(root_dir / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url.replace("%", "%%"))
    return alembic_cfg


def create_migration(message: str):
    command.revision(get_alembic_config(), autogenerate=True, message=message)
    print(f"Migración creada: {message}")


def run_migrations(revision: str = "head"):
    command.upgrade(get_alembic_config(), revision)
    print(f"Base de datos migrada a {revision}")


def rollback_migration(revision: str = "-1"):
    command.downgrade(get_alembic_config(), revision)
    print(f"Rollback a {revision} ejecutado")


def stamp(revision: str = "head"):
    command.stamp(get_alembic_config(), revision)
    print(f"Base de datos marcada en {revision}")


def main(argv):
    if len(argv) < 2:
        print(USAGE)
        return 1

    action = argv[1]
    target = argv[2] if len(argv) > 2 else None

    if action == "create":
        if not target:
            print("Error: Se requiere un mensaje para la migración")
            return 1
        create_migration(target)
    elif action == "upgrade":
        run_migrations(target or "head")
    elif action == "downgrade":
        rollback_migration(target or "-1")
    elif action == "stamp":
        stamp(target or "head")
    elif action == "history":
        command.history(get_alembic_config())
    elif action == "current":
        command.current(get_alembic_config())
    else:
        print(f"Acción desconocida: {action}")
        print(USAGE)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
