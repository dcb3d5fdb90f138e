from dotenv import load_dotenv


def main() -> int:
    # .env has to be applied before the settings module is first imported.
    load_dotenv()

    from videogen.cli import main as cli_main

    return cli_main()
