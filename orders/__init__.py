"""Purchase orders service: persistence, API adapter and seeder."""
