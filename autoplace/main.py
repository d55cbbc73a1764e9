import argparse
from autoplace.commands.run import RunCommand
from autoplace.commands.check import CheckCommand


def main():
    commands = [RunCommand(),
                CheckCommand()]

    # Create an ArgumentParser object
    parser = argparse.ArgumentParser(
        description='AutoPlace: automated marker and socket joint placement for OpenSim walking models')

    # Split up by command
    subparsers = parser.add_subparsers(dest="command")

    # Add a parser for each command
    for command in commands:
        command.register_subcommand(subparsers)

    # Parse the arguments
    args = parser.parse_args()

    # Each command is responsible for ignoring commands that aren't theirs
    for command in commands:
        if command.run(args):
            return
    parser.print_help()


if __name__ == '__main__':
    main()
