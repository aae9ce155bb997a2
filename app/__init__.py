"""FinFam API application package."""
