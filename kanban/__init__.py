# Kanban board: in-memory card API plus the board/card views that drive it
#
# Components:
#   schema.py      - Data model (Card, Column)
#   store.py       - In-memory card store (list/create/patch/delete)
#   config.py      - YAML + environment configuration, logging setup
#   client.py      - requests-based client for the /api/cards endpoints
#   views/         - Card and Board views (rendering, intent events, state sync)
