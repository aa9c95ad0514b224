EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BELOW_THRESHOLD = 2


def exit_code_for(percent: float, fail_under=None) -> int:
    """Map the overall coverage percentage to a process exit code."""
    if fail_under is not None and percent < fail_under:
        return EXIT_BELOW_THRESHOLD
    return EXIT_OK
