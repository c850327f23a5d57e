"""
Setup verification script for the assignment document service.
Checks dependencies, configuration and the template directory.
"""
import sys
import os
from typing import Callable, List, Tuple

# Color codes for terminal output
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
RESET = "\033[0m"


def print_status(message: str, status: bool):
    """Print colored status message."""
    symbol = f"{GREEN}✓{RESET}" if status else f"{RED}✗{RESET}"
    print(f"{symbol} {message}")


def check_python_version() -> bool:
    """Check Python version is 3.9+."""
    version = sys.version_info
    if version.major == 3 and version.minor >= 9:
        print_status(f"Python version: {version.major}.{version.minor}.{version.micro}", True)
        return True
    else:
        print_status(f"Python version {version.major}.{version.minor} (requires 3.9+)", False)
        return False


def check_dependencies() -> bool:
    """Check if required packages are installed."""
    required_packages = [
        "fastapi",
        "uvicorn",
        "pydantic_settings",
        "multipart",
        "docx",
        "docxtpl",
        "lxml",
        "jinja2",
        "fitz",
        "PIL",
    ]

    all_installed = True
    for package in required_packages:
        try:
            __import__(package)
            print_status(f"Package '{package}' installed", True)
        except ImportError:
            print_status(f"Package '{package}' missing", False)
            all_installed = False

    return all_installed


def check_env_file() -> bool:
    """Check if .env file exists (optional; defaults apply without it)."""
    if os.path.exists(".env"):
        print_status(".env file exists", True)
    else:
        print_status(".env file missing (using defaults)", True)
    return True


def check_templates() -> bool:
    """Check the template directory and that default templates exist."""
    from assignment_docs.config import settings
    from assignment_docs.services.template_registry import TemplateRegistry

    registry = TemplateRegistry(settings.TEMPLATE_DIR)
    if not registry.template_dir.is_dir():
        print_status(f"Template directory {settings.TEMPLATE_DIR} missing", False)
        print(f"  {YELLOW}Run: python generate_templates.py {settings.TEMPLATE_DIR}{RESET}")
        return False

    found = registry.list_templates()
    print_status(f"Template directory {settings.TEMPLATE_DIR} ({len(found)} templates)", True)

    ok = True
    for template_type in ("individual", "group"):
        has_default = any(
            t.college_code == "DEFAULT" and t.template_type == template_type for t in found
        )
        print_status(f"default_{template_type}.docx: {'Found' if has_default else 'Missing'}", has_default)
        ok = ok and has_default
    return ok


def check_render() -> bool:
    """Render the default individual template with sample data."""
    from assignment_docs.config import settings
    from assignment_docs.services.template_merger import TemplateMerger
    from assignment_docs.services.template_registry import TemplateRegistry

    merger = TemplateMerger(settings.DEFAULT_COLLEGE_NAME, settings.DEFAULT_COLLEGE_CODE)
    result = merger.generate_from_template(
        TemplateRegistry(settings.TEMPLATE_DIR),
        settings.DEFAULT_COLLEGE_CODE,
        "individual",
        {
            "student_name": "Setup Check",
            "title": "Verification",
            "assignment_content": "Sample paragraph.",
        },
    )
    print_status(
        f"Sample merge: {len(result.document):,} bytes, content appended: {result.content_appended}",
        result.content_appended,
    )
    return result.content_appended


def main():
    """Run all verification checks."""
    print(f"\n{BLUE}{'='*60}{RESET}")
    print(f"{BLUE}Assignment Docs - Setup Verification{RESET}")
    print(f"{BLUE}{'='*60}{RESET}\n")

    checks: List[Tuple[str, Callable[[], bool]]] = [
        ("Python Version", check_python_version),
        ("Dependencies", check_dependencies),
        ("Environment File", check_env_file),
        ("Templates", check_templates),
        ("Template Rendering", check_render),
    ]

    results = []

    for check_name, check_func in checks:
        print(f"\n{BLUE}Checking {check_name}...{RESET}")
        try:
            result = check_func()
            results.append(result)
        except Exception as e:
            print_status(f"Error during check: {str(e)}", False)
            results.append(False)

    # Summary
    print(f"\n{BLUE}{'='*60}{RESET}")
    passed = sum(results)
    total = len(results)

    if passed == total:
        print(f"{GREEN}✓ All checks passed! ({passed}/{total}){RESET}")
        print(f"\n{GREEN}You're ready to run the service:{RESET}")
        print(f"  uvicorn assignment_docs.main:app --reload")
    else:
        print(f"{RED}✗ Some checks failed ({passed}/{total} passed){RESET}")
        print(f"\n{YELLOW}Please fix the issues above before running the service.{RESET}")
        sys.exit(1)

    print(f"{BLUE}{'='*60}{RESET}\n")


if __name__ == "__main__":
    main()
