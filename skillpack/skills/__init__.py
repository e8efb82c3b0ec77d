"""Skillpack skills: one module per third-party API.

Each skill is a Python file in this folder with:
  NAME: str                  kebab-case skill id
  VERSION: str
  DESCRIPTION: str
  ACTIONS: dict[str, str]    {action_name: description}
  PROVIDER: dict             default base_url, secret name and auth style
  def validate(params) -> {"valid": bool, "error"?: str}
  async def execute(params, context) -> {"result": str, "metadata": dict}
"""
