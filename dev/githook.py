import os
import sys

if __name__ == '__main__':
    print('Hook ran')
    if sys.platform == 'win32':
        format_command = 'py -m ruff format pyguild tests dev'
        check_command = 'py -m ruff check pyguild tests dev'
    else:
        format_command = 'python -m ruff format pyguild tests dev'
        check_command = 'python -m ruff check pyguild tests dev'

    if os.system(format_command) == 0:
        if os.system(check_command) != 0:
            print(f'Linting failed, please run "{check_command} --fix" to fix them automatically.')
            sys.exit(1)
    else:
        print(f'Formatting failed, run "{format_command}" to see what went wrong.')
        sys.exit(1)
