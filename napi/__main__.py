"""Allow `python -m napi`"""

from napi.cli.main import main

if __name__ == "__main__":
    main()
