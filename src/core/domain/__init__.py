"""Modelos y entidades del dominio.

Por qué:
- Aquí viven las estructuras de datos puras (Pydantic v2) y las relaciones
  HATEOAS que el cliente sabe seguir.
- El dominio no conoce HTTP ni CLI: solo conceptos del problema.
"""
