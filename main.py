from superstring import run_solver
import sys

if __name__ == '__main__':
    sys.exit(run_solver(sys.argv[1:]))
