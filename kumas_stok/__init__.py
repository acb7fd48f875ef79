"""Kumaş stok, sevk ve cari hesap yönetimi."""

__version__ = "0.1.0"
