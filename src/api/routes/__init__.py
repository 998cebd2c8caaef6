"""Rotas HTTP da API: camada fina sobre os serviços de aplicação.

Responsabilidades:
- Definir endpoints HTTP (consultas, histórico, webhooks, health)
- Extrair o usuário autenticado (X-User-Id) e validar o corpo
- Delegar para app/services via ServiceContainer
- Mapear exceções de domínio para status HTTP (errors.py)

Agregação:
- router.py: registra todos os routers no app principal
"""

from __future__ import annotations

from api.routes.router import create_api_router

__all__ = ["create_api_router"]
