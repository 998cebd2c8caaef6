"""App: coração do sistema: orquestração de consultas e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- domain/: modelos de domínio (consulta, resultado canônico, histórico, webhook)
- services/: orquestrador, polling, ledger e dispatcher de webhooks
- infra/: implementações concretas de IO (HTTP, stores)
- protocols/: contratos/interfaces
- observability/: correlation_id e métricas via logs estruturados

Padrão: app executa; api adapta; fsm governa; utils apoia.
"""
