"""支持 ``python -m mmsetup`` 调用"""

from mmsetup.cli import main

if __name__ == "__main__":
    main()
