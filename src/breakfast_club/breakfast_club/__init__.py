"""Breakfast Club package.

This package is organized by feature modules (users, orders, attendance, qrcodes)
with a thin Flask controller layer over service/repository layers.
"""
