#!/usr/bin/env python

if __name__ == '__main__':
    import setuptools

    setuptools.setup(
        name='hexmerger',
        version='0.1.0',
        description='Firmware memory image conversion and merging',
        license='BSD-2-Clause',
        author='Andrea Zoppi',
        package_dir={'': 'src'},
        packages=setuptools.find_packages('src'),
        python_requires='>=3.8',
        install_requires=[
            'bytesparse>=1.0',
        ],
        extras_require={
            'testing': [
                'pytest',
            ],
        },
    )
