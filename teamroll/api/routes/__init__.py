"""
API routes.

- team_roll: Team Roll Draft runs (start, roll, slot, pick, board)
"""
