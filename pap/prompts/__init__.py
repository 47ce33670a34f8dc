from pap.prompts.manager import PromptManager

__all__ = ["PromptManager"]
