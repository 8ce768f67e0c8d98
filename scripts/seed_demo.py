"""Seed demo data by calling the HTTP API.

Best-effort and safe to re-run: a user or product that already exists is
reported and skipped (the API answers 400 on duplicate email/name).

Usage:
    python scripts/seed_demo.py

The API base URL comes from API_URL (default http://localhost:8000).
"""
import os
import sys

import httpx

API_URL = os.environ.get("API_URL", "http://localhost:8000")

DEMO_USER = {
    "nombre": "Juan",
    "apellido": "Perez",
    "email": "juan.perez@example.com",
    "password": "password123",
    "telefono": "+56912345678",
    "direccion": "Calle Ficticia 123",
    "fechaNacimiento": "1990-01-01",
    "genero": "Masculino",
}

DEMO_PRODUCTS = [
    {"nombreProducto": "Cepillo de dientes de bambú", "descripcion": "Cepillo biodegradable con cerdas vegetales.", "precio": 3.5, "stock": 50},
    {"nombreProducto": "Bolsa reutilizable de algodón", "descripcion": "Bolsa de algodón orgánico para compras.", "precio": 7.9, "stock": 30},
    {"nombreProducto": "Jabón sólido natural", "descripcion": "Jabón artesanal sin envase plástico.", "precio": 4.25, "stock": 40},
    {"nombreProducto": "Botella de acero inoxidable", "descripcion": "Botella térmica de 750 ml.", "precio": 19.99, "stock": 10},
]


def post(client: httpx.Client, path: str, payload: dict):
    r = client.post(path, json=payload)
    if r.status_code == 201:
        print(f"Created {path}: {r.headers.get('location')}")
        return r.json()
    print(f"{path} returned {r.status_code}: {r.text}")
    return None


def main():
    print(f"Seeding demo data into {API_URL}")
    try:
        with httpx.Client(base_url=API_URL, timeout=5.0) as client:
            user = post(client, "/api/usuarios", DEMO_USER)
            for product in DEMO_PRODUCTS:
                post(client, "/api/inventario", product)
    except httpx.RequestError as e:
        print(f"API unavailable: {e}")
        sys.exit(1)

    if user:
        print(f"\nDemo cart: GET {API_URL}/api/carritos/{user['id']}")


if __name__ == "__main__":
    main()
