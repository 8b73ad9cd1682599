"""Seed the event database: migrations, AB1 rooms, board maps, optional superadmin.

    SNL_SUPERADMIN_USERNAME=root SNL_SUPERADMIN_PASSWORD=... python seed_db.py
"""

from src.app_shell.cli import main

if __name__ == "__main__":
    main(["seed"])
