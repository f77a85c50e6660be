"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = [
    "register", "login", "logout", "whoami", "upload", "list", "info", "download",
    "transfer", "share", "revoke", "delete", "clear", "exit", "help",
]

STYLE = Style.from_dict(
    {
        "prompt": "#2E86DE bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;46;134;222m"
RESET = "\033[0m"

LOGO = f"""{BLUE}
  ____  _                    ____       _
 / ___|| |__   __ _ _ __ ___|  _ \\ _ __(_)_   _____
 \\___ \\| '_ \\ / _` | '__/ _ \\ | | | '__| \\ \\ / / _ \\
  ___) | | | | (_| | | |  __/ |_| | |  | |\\ V /  __/
 |____/|_| |_|\\__,_|_|  \\___|____/|_|  |_| \\_/ \\___|
{RESET}"""

WELCOME_TITLE = "ShareDrive CLI - Owned and shared files"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "sharedrive> "

HELP_TEXT = """Available commands:
  register <username> <password>      Register new user account
  login <username> <password>         Login and get API key
  logout                              Revoke the API key and forget it locally
  whoami                              Show the logged-in user
  upload <path> [<path> ...]          Upload files; you become their owner
  list                                List files you own or that are shared with you
  info <file_id>                      Show owner and share list of a file
  download <file_id> [output_path]    Download file (defaults to downloads/<file_id>)
  transfer <file_id> <username>       Hand ownership of a file to another user
  share <file_id> [<username> ...]    Replace the share list (no users = unshare all)
  revoke <file_id> <username> [...]   Remove users from the share list
  delete <file_id>                    Delete a file you own
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Examples:
  register alice mypassword123
  upload reports/report.pdf
  share report.pdf bob carol
  revoke report.pdf carol
  transfer report.pdf bob
  download report.pdf downloads/copy.pdf"""
