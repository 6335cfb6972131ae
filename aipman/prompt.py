"""Confirmation policies handed to the lifecycle manager."""

from colorama import Fore, Style  # type: ignore

YES_ANSWERS = ("y", "yes")
NO_ANSWERS = ("n", "no")


def assume_yes(question: str) -> bool:
    return True


def ask_yes_no(question: str, default: bool = True, input_func=None) -> bool:
    """Ask a yes/no question until the answer is understood. An empty answer means the default."""
    input_func = input_func or input
    hint = "[Y/n]" if default else "[y/N]"
    while True:
        answer = input_func(f"{Fore.YELLOW}{question} {hint} {Style.RESET_ALL}").strip().lower()
        if not answer:
            return default
        if answer in YES_ANSWERS:
            return True
        if answer in NO_ANSWERS:
            return False
        print(f"{Fore.RED}Please answer 'y' or 'n'.{Style.RESET_ALL}")
