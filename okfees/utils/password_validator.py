from typing import List, Tuple

class PasswordValidator:
    def __init__(self, min_length: int = 6):
        self.min_length = min_length

    def check_length(self, password: str) -> List[str]:
        """Check the password is present and long enough."""
        if not password:
            return ["Password is required"]
        if len(password) < self.min_length:
            return [f"Password must be at least {self.min_length} characters"]
        return []

    def check_confirmation(self, password: str, confirm_password: str) -> List[str]:
        """Check the confirmation field matches exactly."""
        if password != confirm_password:
            return ["Passwords do not match"]
        return []

    def validate_password(self, password: str, confirm_password: str) -> Tuple[bool, List[str]]:
        """Validate a new password and its confirmation, return (is_valid, issues)."""
        issues = []
        issues.extend(self.check_confirmation(password, confirm_password))
        issues.extend(self.check_length(password))
        return len(issues) == 0, issues
