#!/usr/bin/env python3
"""
串口链路诊断工具 - 模块CLI入口
==============================

支持通过 python -m serial_link 调用
"""

import sys
import argparse

from . import __version__
from .cli.link_cli import LinkCLI, parse_alt_bauds, parse_msg_type, parse_payload
from .config.constants import DEFAULT_BAUDRATE, SLCAN_PRODUCT_KEYWORD
from .config.settings import BaudTable, LinkConfig
from .utils.logger import get_logger, set_level

logger = get_logger(__name__)

PROGRAM_NAME = "串口链路诊断工具"


def create_parser():
    """创建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        prog="serial-link",
        description=f"{PROGRAM_NAME} v{__version__}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例：
  # 列出串口及识别结果
  python -m serial_link ports --serial-number AN

  # 探测设备，未发现时重试3次
  python -m serial_link probe --serial-number AN --retries 3

  # 发送一帧
  python -m serial_link send --serial-number AN --msg-type set_motor_dirs --payload 01
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"{PROGRAM_NAME} v{__version__}"
    )

    # 所有子命令共用的链路参数
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--serial-number", default="", help="设备的USB序列号")
    common.add_argument(
        "--baudrate", type=int, default=DEFAULT_BAUDRATE,
        help=f"直连波特率（默认{DEFAULT_BAUDRATE}）",
    )
    common.add_argument(
        "--bridge-keyword", default=SLCAN_PRODUCT_KEYWORD,
        help=f"串口CAN适配器产品名关键字（默认{SLCAN_PRODUCT_KEYWORD}）",
    )
    common.add_argument("--bridge-baud", type=int, default=None, help="适配器波特率（默认同直连）")
    common.add_argument(
        "--alt-baud", action="append", default=[], metavar="KEYWORD=BAUD",
        help="厂商名包含KEYWORD时使用BAUD，可重复",
    )
    common.add_argument(
        "--log-level", default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="日志级别",
    )

    subparsers = parser.add_subparsers(dest="command", help="可用命令")

    subparsers.add_parser("ports", parents=[common], help="列出串口及识别结果")

    probe_parser = subparsers.add_parser("probe", parents=[common], help="探测并打开设备")
    probe_parser.add_argument("--retries", type=int, default=0, help="未发现设备时的重试次数")
    probe_parser.add_argument("--backoff", type=float, default=0.5, help="退避基础时间（秒）")

    send_parser = subparsers.add_parser("send", parents=[common], help="发送单帧命令")
    send_parser.add_argument("--msg-type", required=True, help="消息类型名或数值")
    send_parser.add_argument("--payload", default="", help="十六进制负载")

    return parser


def build_config(args) -> LinkConfig:
    """由命令行参数构造链路配置"""
    baud_table = BaudTable(
        primary_baud=args.baudrate,
        bridge_keyword=args.bridge_keyword,
        bridge_baud=args.bridge_baud if args.bridge_baud is not None else args.baudrate,
        manufacturer_bauds=parse_alt_bauds(args.alt_baud),
    )
    return LinkConfig(usb_serial_number=args.serial_number, baud_table=baud_table)


def main(argv=None):
    """主函数"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    try:
        if args.log_level:
            set_level(args.log_level)

        config = build_config(args)

        if args.command == "ports":
            success = LinkCLI.list_ports(config)
        elif args.command == "probe":
            success = LinkCLI.probe(config, args.retries, args.backoff)
        else:
            success = LinkCLI.send(
                config, parse_msg_type(args.msg_type), parse_payload(args.payload)
            )

        sys.exit(0 if success else 1)

    except ValueError as e:
        print(f"参数错误: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n用户中断程序，退出")
        sys.exit(1)


if __name__ == "__main__":
    main()
