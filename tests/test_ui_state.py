from ui_state import AppState, UIState


def test_app_starts_at_menu():
    assert AppState().current_state is UIState.MENU
