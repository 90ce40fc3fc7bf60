def mask_email(email: str, visible: int = 2) -> str:
    """
    Hide an email's local part behind asterisks, keeping the first ``visible``
    characters and the whole domain.

    johnsmith@example.com -> jo*******@example.com
    ab@example.com        -> ab@example.com
    """
    local, sep, domain = email.rpartition("@")
    if not sep or len(local) <= visible:
        return email
    return f"{local[:visible]}{'*' * (len(local) - visible)}@{domain}"
