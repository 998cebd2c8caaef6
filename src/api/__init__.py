"""API: camada de borda: provedores externos e rotas HTTP.

Subpastas:
- connectors/: clientes e adaptadores dos provedores (Infosimples, Helena)
- normalizers/: payloads de provedor → resultado canônico
- routes/: endpoints HTTP (consultas, histórico, webhooks, health)

NÃO PODE conter: FSM, regras de ciclo de vida, orquestração de consultas.
"""
