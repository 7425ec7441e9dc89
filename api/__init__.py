"""Read-only status API over the migration control tables"""
