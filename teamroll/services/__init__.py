"""
Services module for draft business logic.

- draft: the Team Roll Draft engine, its rules and the board read path
- reference: loading teams, coaches and season rosters
"""
