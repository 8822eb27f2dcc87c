"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) para los colaboradores externos del cliente
  del Hub (permisos, telemetría).
- Permite invertir dependencias: el Core depende de abstracciones.
"""
