from setuptools import setup, find_packages


setup(
    name='ceph-upgrade',
    version='1.0.0',
    packages=find_packages(include=['ceph_upgrade', 'ceph_upgrade.*']),

    author='',
    author_email='dev@ceph.io',
    description='Check if Ceph daemons can be stopped safely during a rolling upgrade',
    license='LGPLv2+',
    keywords='ceph upgrade ok-to-stop orchestration',
    url="https://github.com/ceph/ceph",
    zip_safe = False,
    python_requires='>=3.7',
    install_requires=(
        'pyyaml',
    ),
    extras_require={
        'test': [
            'pytest >=2.1.3',
            'mock',
        ],
    },
    entry_points = dict(
        console_scripts = [
            'ceph-upgrade = ceph_upgrade.main:Upgrade',
        ],
    ),
    classifiers = [
        'Environment :: Console',
        'Intended Audience :: Information Technology',
        'Intended Audience :: System Administrators',
        'Operating System :: POSIX :: Linux',
        'License :: OSI Approved :: GNU Lesser General Public License v2 or later (LGPLv2+)',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
    ]
)
