#!/usr/bin/env python3
"""
Quick verification that the Kanban board works end-to-end over real HTTP.
"""
import threading

from werkzeug.serving import make_server

from kanban.client import KanbanClient
from kanban.config import Config
from kanban.schema import Column
from kanban.views import BoardView
from kanban_server import create_app


def counts(board: BoardView) -> str:
    return "/".join(str(n) for n in board.column_counts().values())


def main():
    print("=" * 60)
    print("Kanban Board Verification")
    print("=" * 60)

    print("\n[1/6] Starting server on an ephemeral port...")
    cfg = Config.load()
    server = make_server("127.0.0.1", 0, create_app(cfg))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    cfg.api_url = f"http://127.0.0.1:{server.server_port}"
    print(f"✅ Server listening at {cfg.api_url}")

    try:
        print("\n[2/6] Mounting board view...")
        board = BoardView(KanbanClient.from_config(cfg))
        board.mount()
        print(f"✅ Loaded {len(board.cards)} cards, counts {counts(board)}")

        print("\n[3/6] Adding a card through the add form...")
        board.open_add_form(Column.TODO)
        board.type_new_title("  Act on the decision  ")
        board.add_form_key("Enter")
        new_card = board.cards[-1]
        print(f"✅ Created {new_card.card_id}: {new_card.title!r}, counts {counts(board)}")

        print("\n[4/6] Moving it right with the arrow control...")
        board.card_view(new_card.card_id).click_move_right()
        print(f"✅ Now in {board.card_view(new_card.card_id).column.value}, counts {counts(board)}")

        print("\n[5/6] Renaming it inline...")
        view = board.card_view(new_card.card_id)
        view.click_title()
        view.type_text("Act decisively")
        view.key_down("Enter")
        print(f"✅ Title is now {board.card_view(new_card.card_id).title!r}")

        print("\n[6/6] Deleting it...")
        board.card_view(new_card.card_id).click_delete()
        assert board.card_view(new_card.card_id) is None
        print(f"✅ Deleted, counts {counts(board)}")

        if board.error:
            print(f"❌ Board reported an error: {board.error}")
            return
        print("\n" + "=" * 60)
        print("All checks passed")
        print("=" * 60)
    finally:
        server.shutdown()


if __name__ == "__main__":
    main()
