"""Importable packages used as descriptor scan targets."""
