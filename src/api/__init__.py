"""API — camada de borda.

Responsabilidades:
- Receber webhooks dos providers WhatsApp
- Normalizar payloads para a mensagem canônica

Subpastas:
- normalizers/: conversão de payloads de provider -> modelos canônicos
- routes/: endpoints HTTP (webhooks, health)

NÃO PODE conter: ingestão de mídia, publicação, orquestração de use cases.
"""
