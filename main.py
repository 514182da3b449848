from cli.app import cli


def main():
    """Entry point for the dynamodb-autoscaler CLI. Delegates to cli.app:cli."""
    cli()


if __name__ == "__main__":
    main()
