"""App — coração do sistema: orquestração, casos de uso e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- domain/: mensagem canônica, tenant e canal
- use_cases/: casos de uso (webhook → normalização → mídia → publicação)
- services/: serviços de aplicação (pipeline de ingestão de mídia)
- infra/: implementações concretas de IO (crypto, storage, eventos, HTTP)
- protocols/: contratos/interfaces
- observability/: logs estruturados e métricas

Padrão: app executa; api adapta; utils apoia.
"""
