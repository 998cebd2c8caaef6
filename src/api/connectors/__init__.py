"""Connectors por provedor - adapters de borda para APIs externas.

Estrutura:
- infosimples/: DETRAN via Infosimples (CNH, veículo, débitos)
- helena/: Helena v1 (condutor por CPF, débitos veiculares)
- provider_http.py: mapeamento comum de erros HTTP para ProviderError

Cada provedor tem seu próprio connector, garantindo SRP e isolamento de falhas.
"""

__all__: list[str] = []
